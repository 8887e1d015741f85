"""对外接口：服务函数与终端展示层。"""
