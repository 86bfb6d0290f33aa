"""imagestream - stream a generative model reply to the console and to image files."""

__version__ = '0.1.0'
