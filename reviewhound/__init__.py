"""Report linter and compiler findings to Gerrit, Bitbucket Code Insights and GitHub Actions."""

__version__ = "0.1.0"