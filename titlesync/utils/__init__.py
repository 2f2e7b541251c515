"""
titlesync Utilities

Logging setup and file operations shared by the other modules.

Author: titlesync Project
License: MIT
"""
