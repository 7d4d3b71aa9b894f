"""请求路径集成：把注册表接入 `requests`。"""
