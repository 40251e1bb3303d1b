"""GitHub activity line-change statistics"""
