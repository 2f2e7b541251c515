"""
titlesync

Keeps collections of title-id tagged game packages synchronized between
local folders and removable devices.

Author: titlesync Project
License: MIT
"""

__version__ = "0.1.0"
