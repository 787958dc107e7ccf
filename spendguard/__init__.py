"""SpendGuard - financial behavior engine"""
