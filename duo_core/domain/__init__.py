"""领域层模型与协议。

包含：
- models: 统一的 ChatTurn / StreamEvent / SessionState 模型。
- conversation: 有界对话历史 ConversationHistory。
- stars: 星星计数存储协议 StarStore。
- exceptions: 业务异常类型定义。
"""
