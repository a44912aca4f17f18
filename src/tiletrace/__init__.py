"""Pan, zoom and trace cell paths over large tile-grid map images."""
__version__ = "0.1.0"
