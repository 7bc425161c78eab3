"""
Módulo de Facturación (Invoices)

Facturas de venta con descuento de inventario en la misma transacción:

- Bloqueo de filas de producto y descuento con guarda de stock
- IVA plano (19%) opcional por factura
- Avisos de stock bajo en la respuesta de creación
- Edición solo de cabecera; borrado físico sin devolver stock

Tablas principales:
- invoices: Facturas de venta (número único por tenant)
- invoice_items: Ítems de factura
"""
