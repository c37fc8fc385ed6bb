from .visit import Visit
from .conversession import Conversession
from .question import Question
from .application import Application

__all__ = ['Visit', 'Conversession', 'Question', 'Application']
