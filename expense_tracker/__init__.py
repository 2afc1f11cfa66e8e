"""Personal expense tracking: filtering, budgets, dashboards and export."""
