# CLI package for GradeBox
"""
Command-line interface for platform evaluation scripts.

Commands:
    gradebox run     — Grade the submission in the working directory
    gradebox config  — Show the effective grading configuration
"""
