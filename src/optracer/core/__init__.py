from optracer.core.merger import merge_properties

__all__ = ["merge_properties"]
