"""HTTP 接口模块"""
