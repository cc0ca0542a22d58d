"""HTTP surface for the outfit engine."""
