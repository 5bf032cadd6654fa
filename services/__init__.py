"""
services/ - Business Logic Layer
================================
Validation, access checks and orchestration across repositories.
Route handlers of the host application call into this layer only.
"""
