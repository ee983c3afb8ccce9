"""Library for parsing and encoding rfc5545 content lines and components."""
