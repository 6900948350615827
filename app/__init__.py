"""
FastAPI Application Package

This package contains the FastAPI application and its streaming helpers.
It serves as the entry point for the relay, exposing the polled and
Server-Sent Events price endpoints.
"""
