from medace.consts import VERSION

__version__ = VERSION
