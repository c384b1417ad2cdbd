# Exam Board - Core Library
"""
Domain modules shared by the API server (api/) and the terminal client (cli/).
"""
