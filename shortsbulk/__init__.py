"""shortsbulk: YouTube Shorts 일괄 업로더."""

__version__ = "0.1.0"
