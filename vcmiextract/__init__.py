"""Extract Heroes of Might and Magic III archives, animations and textures into files and PNG images."""

__version__ = "1.0.0"