# Repositories package init
"""
Employee Directory Backend - Repository Layer
===============================================

What:  The only code allowed to issue SQL against the employees table.
Why:   Keeps query composition (search, filters, pagination window) and
       storage-error translation in one place, below the services.

Repository Inventory:
    - EmployeeRepository: create / get / list / count / update / delete
"""

from employee_directory.repositories.employee_repository import EmployeeRepository

__all__ = ["EmployeeRepository"]
