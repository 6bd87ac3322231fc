from rest_framework import serializers

from .models import Profile
from .skills import parse_skills


class ProfileSummarySerializer(serializers.ModelSerializer):
    # I expose the user id as the profile id; that's what the rest of the API keys on.
    id = serializers.IntegerField(source="user_id", read_only=True)
    full_name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = ("id", "full_name", "role")

    def get_full_name(self, obj: Profile) -> str:
        return obj.display_name

    def get_role(self, obj: Profile):
        return obj.role or None


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ("role", "full_name", "location", "phone", "skills")

    def validate(self, attrs):
        role = attrs.get("role", getattr(self.instance, "role", ""))
        skills = attrs.get("skills", getattr(self.instance, "skills", None))
        if skills is not None:
            if not role:
                raise serializers.ValidationError({"skills": "Pick a role before adding skills."})
            try:
                parse_skills(role, skills)
            except ValueError as e:
                raise serializers.ValidationError({"skills": str(e)})
        return attrs
