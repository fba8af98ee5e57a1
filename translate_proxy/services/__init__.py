"""Services: credentials, upstream API clients and folder resolution."""
