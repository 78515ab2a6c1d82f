"""TaskSync Gateway -- HTTP API + 实时事件通道"""
