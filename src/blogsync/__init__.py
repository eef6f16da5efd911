"""blogsync - blog drafts and posts in local storage or a GitHub repository."""

__version__ = "0.1.0"
