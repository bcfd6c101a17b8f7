"""Cart and ticket-checkout engine for the dance academy storefront."""
