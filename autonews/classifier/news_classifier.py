import logging
from threading import Lock
from typing import List, Dict, Optional

from autonews.taxonomy import Sentiment

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "tabularisai/multilingual-sentiment-analysis"


class NewsClassifier:
    """
    Classifica o sentimento de títulos/resumos de notícia.

    Usa modelo multilíngue de cinco classes (Muito Negativo ... Muito
    Positivo) e colapsa para positive / neutral / negative. O modelo só é
    carregado na primeira chamada.
    """

    FIVE_CLASS_MAP = [
        Sentiment.negative,
        Sentiment.negative,
        Sentiment.neutral,
        Sentiment.positive,
        Sentiment.positive,
    ]

    def __init__(self, model_name: str = DEFAULT_MODEL):
        self.model_name = model_name
        self.tokenizer = None
        self.model = None
        self._lock = Lock()

    def _load(self):
        with self._lock:
            if self.model is not None:
                return
            from transformers import AutoTokenizer, AutoModelForSequenceClassification
            logger.info("Loading sentiment model %s", self.model_name)
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_name)
            self.model = AutoModelForSequenceClassification.from_pretrained(self.model_name)

    def classify_texts(self, texts: List[str]) -> List[Dict]:
        import torch

        self._load()
        inputs = self.tokenizer(texts, return_tensors="pt", padding=True,
                                truncation=True, max_length=512)
        with torch.no_grad():
            outputs = self.model(**inputs)
        probs = torch.nn.functional.softmax(outputs.logits, dim=-1)
        results = []
        for text, prob in zip(texts, probs):
            idx = int(torch.argmax(prob).item())
            results.append({
                "text": text,
                "sentiment": self.FIVE_CLASS_MAP[min(idx, len(self.FIVE_CLASS_MAP) - 1)],
                "probabilities": [float(p) for p in prob.tolist()],
            })
        return results

    def classify(self, text: str) -> Optional[Sentiment]:
        if not text or not text.strip():
            return None
        return self.classify_texts([text])[0]["sentiment"]
