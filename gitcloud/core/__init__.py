"""
Core business logic for photo storage.

This module is framework-agnostic - it doesn't import FastAPI, requests,
or any infrastructure concerns. The upload policy can be tested against
an in-memory repository host.
"""
