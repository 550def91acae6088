"""fatbundle: fuse per-architecture application bundles into universal ones."""

__version__ = "0.3.0"
