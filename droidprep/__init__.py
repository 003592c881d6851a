"""droidprep - prepare a native Android project from a platform-neutral descriptor."""

__app_name__ = "droidprep"
__version__ = "0.4.0"

__all__ = ["__app_name__", "__version__"]
