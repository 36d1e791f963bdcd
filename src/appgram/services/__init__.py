"""Transport, resource client and client-side state holders."""

from appgram.services.appgram_client import AppgramClient
from appgram.services.collection import CollectionState
from appgram.services.comments import CommentThread
from appgram.services.forms import ContactFormSubmitter, SurveySubmitter
from appgram.services.resource import ResourceState
from appgram.services.support import SupportDesk
from appgram.services.transport import TransportClient
from appgram.services.voting import VoteCoordinator, VotePhase, VoteRegistry

__all__ = [
    "AppgramClient",
    "CollectionState",
    "CommentThread",
    "ContactFormSubmitter",
    "ResourceState",
    "SupportDesk",
    "SurveySubmitter",
    "TransportClient",
    "VoteCoordinator",
    "VotePhase",
    "VoteRegistry",
]
