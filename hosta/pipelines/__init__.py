from hosta.pipelines.simple_pipeline import OneTurnConversationPipeline, Pipeline

__all__ = ["OneTurnConversationPipeline", "Pipeline"]
