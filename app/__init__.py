"""
FastAPI Application Package

This package contains the FastAPI application exposing the aggregation layer:
the request/response message channel, snapshot/summary/conversion endpoints and
a WebSocket stream of snapshot and badge updates.
"""
