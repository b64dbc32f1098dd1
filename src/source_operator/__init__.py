"""Source Operator: reconciles Source resources into rclone-backed volumes."""

__version__ = "0.1.0"
