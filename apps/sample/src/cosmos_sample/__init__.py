"""Sample FastAPI service storing users through cosmos_data repositories."""
