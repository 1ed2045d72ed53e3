# Middleware package init
"""
Employee Directory Backend - Middleware Package
=================================================

Middleware Chain (request direction):
    Request → [Security Headers] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Security headers outermost: every response gets them, error pages included
    2. Request ID: correlation ID set before anything logs
    3. Logging: access line with status and duration
    4. GZip / CORS: FastAPI built-ins
"""
