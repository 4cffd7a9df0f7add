"""Image resize plugin."""

from .task import ResizeTarget, describe_source, plan_targets, resize_image

__all__ = ["ResizeTarget", "describe_source", "plan_targets", "resize_image"]
