from travel_chatbot.db import CRUDCapability
from travel_chatbot.models.auth import User
from travel_chatbot.models.chat import Conversation, Message
from travel_chatbot.models.travel import City, BudgetRange, Hotel, TransportCost


class UserCRUD(CRUDCapability[User]):
    resource_db = User


class ConversationCRUD(CRUDCapability[Conversation]):
    resource_db = Conversation


class ChatMessageCRUD(CRUDCapability[Message]):
    resource_db = Message


class CityCRUD(CRUDCapability[City]):
    resource_db = City


class BudgetRangeCRUD(CRUDCapability[BudgetRange]):
    resource_db = BudgetRange


class HotelCRUD(CRUDCapability[Hotel]):
    resource_db = Hotel


class TransportCostCRUD(CRUDCapability[TransportCost]):
    resource_db = TransportCost


user_crud = UserCRUD(User)
conversation_crud = ConversationCRUD(Conversation)
chat_message_crud = ChatMessageCRUD(Message)
city_crud = CityCRUD(City)
budget_range_crud = BudgetRangeCRUD(BudgetRange)
hotel_crud = HotelCRUD(Hotel)
transport_cost_crud = TransportCostCRUD(TransportCost)
