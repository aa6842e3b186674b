"""
Agent 模块 - 学习顾问的模型调用、双轨输出解析与档案更新流水线
"""
