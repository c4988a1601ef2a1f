"""Linear webhook ingress resource and signature verification."""
