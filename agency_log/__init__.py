#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - 21-day habit journal
Sleep, food, screen-time and output log with daily moods and AI encouragement

Version: 1.0.0
"""

__version__ = "1.0.0"

__all__ = ['__version__']
