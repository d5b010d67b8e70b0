"""Live best bid/ask price tracker."""
