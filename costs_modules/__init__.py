"""Business modules built on the costs kernel and engines."""
