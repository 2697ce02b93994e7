"""
Catalog record models: ProductDraft (form input), Product (stored record),
ProductUpdate (partial edit).
"""
