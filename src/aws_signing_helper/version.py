"""Version information for the AWS signing helper"""

__version__ = "1.0.0"
