"""
Riding Resolver: electoral district and assessed value lookup for civic addresses.

Architecture: Address normalization → Browser automation (Elections BC, BC Assessment)
              or Geocoder + boundary containment → Confidence-graded result
"""

__version__ = "1.0.0"
