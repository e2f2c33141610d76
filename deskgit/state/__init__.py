"""Pure reconcilers for the changes view and the single-writer store that commits them."""
