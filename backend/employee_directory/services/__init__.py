# Services package init
"""
Employee Directory Backend - Services Layer
=============================================

What:  Business logic layer sitting between routes (HTTP) and the
       repository (SQL).

Service Inventory:
    - EmployeeService: normalization, existence checks, error translation
      and pagination metadata for every employee use case
"""
