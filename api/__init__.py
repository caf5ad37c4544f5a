"""HTTP API: health, external blog, data export and admin routers"""
