# file generated by the build backend
# don't change, don't track in version control

__all__ = ["__version__", "version"]

version = "0.1.0"
__version__ = version
