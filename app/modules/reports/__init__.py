"""
Reports Module

Consultas de solo lectura sobre facturas, productos y clientes para el
dashboard, más el cierre de turno de caja.

- routers/ -> endpoints FastAPI bajo /reports
- services/ -> consultas y agregación por zona horaria del negocio
- schemas/ -> respuestas Pydantic
"""
