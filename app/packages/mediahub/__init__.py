"""MediaHub 业务包：文件管理、发布审核与内容分类。

服务端装配位于 ``package`` 模块，由注册表按需导入；
``client`` 子包只依赖 ``core`` 中的常量与工具，导入时不会加载路由与数据库层。
"""
