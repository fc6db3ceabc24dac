"""Shared helpers: configuration, logging and small utilities"""
