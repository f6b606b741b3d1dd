"""
WasteWise - photo based waste disposal assistant

Sends a photo to a remote image classification model and turns the
model's raw labels into a disposal recommendation.
"""

__version__ = "1.0.0"
__author__ = "WasteWise Project"
