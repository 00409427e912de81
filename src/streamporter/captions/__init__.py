"""
Caption matching, conversion and upload.
"""
