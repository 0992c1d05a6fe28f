"""Building blocks for deployment plugins: component interfaces, configuration, documentation, data directories, protobuf packing, a pseudo-terminal and a spinner."""

__version__ = "0.1.0"