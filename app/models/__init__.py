from .account import Account
from .login_code import LoginCode
from .tournament import Tournament
from .round import Round
from .registration import Registration
from .judge_profile import JudgeProfile
from .judge_conflict import JudgeTeamConflict
from .pairing import Pairing
from .pairing_edit_history import PairingEditHistory
from .judge_assignment import PairingJudgeAssignment
from .spectate_request import SpectateRequest
from .schedule_proposal import ScheduleProposal
from .notification import CompetitorNotification
from .chat_message import PairingChatMessage
from .evidence import PairingEvidence
from .sponsor_profile import SponsorProfile
from .sponsor_application import SponsorApplication
from .sponsor_invitation import SponsorInvitation
from .site_page import SitePage
from .site_block import SiteBlock
from .blog_post import BlogPost
from .ballot_template import BallotTemplate
