"""
Utilities Package
=================

Small helpers shared by the models and services: input validation,
password hashing, and UTC time handling.
"""
