# Routes package init
"""
Employee Directory Backend - API Routes Package
=================================================

Route Inventory:
    - employees.py: /api/employees CRUD + search
    - health.py:    GET /health

Routes stay thin: extract parameters, call the service, wrap the result
in the response envelope. Errors become responses in main.py's handlers.
"""
