"""In-memory data engine: item autocomplete, shop statistics and bill list views"""
