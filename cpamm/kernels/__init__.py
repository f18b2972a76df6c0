"""
Pure pricing and accounting kernels.
"""
