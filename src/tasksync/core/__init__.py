"""TaskSync Core -- 领域模型、存储、身份 token"""
