from optracer.utils.decorators import tracked_operation

__all__ = ["tracked_operation"]
