"""Text transformation pipelines driven by configuration.

The order in which transformations run is read from `config/config.yaml`
(`pipeline.order`) or passed on the command line; the transformations themselves
live in `textchain.transforms`. Composition is done by `chainkit`.
"""
