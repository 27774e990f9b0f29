from .tenancy import Company
from .inventory import Category, Product
from .invoices import ClientVendor, Invoice, InvoiceProduct
from .billing import Payment

__all__ = [
    'Company',
    'Category', 'Product',
    'ClientVendor', 'Invoice', 'InvoiceProduct',
    'Payment',
]
